"""File-backed cache implementation.

- file_format: header and metadata block encoding
- codecs: payload serializers
- file_cache: the FileCache handle (open / save / load)
- factory: CacheFactory, which owns a storage directory
"""

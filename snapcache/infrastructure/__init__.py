"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the domain interfaces to the file system, configuration sources,
logging and the console.
"""

"""Domain Interfaces: Abstract contracts implemented by the infrastructure layer."""

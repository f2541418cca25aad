"""
Contracts - generated bindings for the project's Solidity contracts.

- basic: key/value store with a version string and an ItemSet event
"""

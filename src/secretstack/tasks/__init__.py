"""
secretstack tasks package.

Modules are added to the CLI namespace with Collection.from_module() in secretstack.cli.
"""

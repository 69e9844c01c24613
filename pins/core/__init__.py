"""Pins core - the directive expansion engine.

Subpackages:
- models: stored items, deferred evaluations, directive descriptors
- syntax: the shared ``{{...}}`` scanner
- registry: DirectiveRegistry and the applicability checker
- runtime: ResolutionContext, Resolver, open_pin
- sandbox: the Script directive's sandbox
- scheduling: deferred evaluations and pin expiration
- directives: the built-in directive set
"""

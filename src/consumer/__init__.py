"""Consumer function that queries the lookup service during invocation"""

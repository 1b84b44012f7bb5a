# Services package init
"""
API Base — Services Layer
==========================

What:  Business rules for the Example resource, split into commands (writes)
       and queries (reads), one handler class each.
Why:   Handlers can be unit-tested with a mocked session and reused by the
       seeder CLI without HTTP.

Inventory:
    example_commands:  CreateExample / UpdateExample / DeleteExample
    example_queries:   GetExampleById / ListExamples
"""

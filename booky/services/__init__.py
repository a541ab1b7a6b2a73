# Services package init
"""
Booky - Services Layer
======================

What:  Data-access layer sitting between routes (HTTP) and MongoDB.
How:   Services accept typed requests plus a collection handle, issue one
       driver call per operation, and return typed records.

Service Inventory:
    - BookService: list / create / update / delete over the books collection
"""

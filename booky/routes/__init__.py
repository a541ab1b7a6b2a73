# Routes package init
"""
Booky - API Routes Package
==========================

Route Inventory:
    - books.py:   GET    /book             (list books)
                  POST   /book             (create book)
                  PUT    /book/{book_id}   (replace book)
                  DELETE /book/{book_id}   (delete book)
    - health.py:  GET    /health           (service health check)

Routes stay thin: extract path/body, call BookService, return the result.
"""

# Services package init
"""
Salon API — Services Layer
===========================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - BookingService: appointment CRUD
    - ProductService: catalog CRUD and the product image lifecycle
    - MediaService:   image validation, upload and deletion at Cloudinary

Services take the database handle as an argument, so they can be tested
without HTTP and without a running MongoDB.
"""

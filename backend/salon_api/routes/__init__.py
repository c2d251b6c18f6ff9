# Routes package init
"""
Salon API — API Routes Package
===============================

Route Inventory:
    - bookings.py:  GET/POST        /api/bookings
                    GET/PUT/DELETE  /api/bookings/{id}
    - products.py:  GET/POST        /api/products
                    GET             /api/products/category/{category}
                    GET/PUT/DELETE  /api/products/{id}
    - health.py:    GET             /health

Routes are thin: they extract data from the request, call a service, and
return the result. Business rules live in `salon_api.services`.
"""

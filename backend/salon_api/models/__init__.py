# Models package init
"""
Salon API — Stored Document Models
===================================

    - booking.py:  Booking  (collection `bookings`)
    - product.py:  Product  (collection `products`)

Models describe what is stored in MongoDB; request contracts live in
`salon_api.schemas`.
"""

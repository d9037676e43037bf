"""Seed promotion catalog, in the flat record shape every source returns.

Used by the default StaticPromotionSource until a real catalog is wired in.
"""

SEED_PROMOTIONS: tuple[dict, ...] = (
    {
        "id": 1,
        "title": "Summer Reading Sale",
        "description": "Get 25% off on all fiction books",
        "discountType": "percentage",
        "discountValue": 25,
        "code": "SUMMER25",
        "startDate": "2024-06-01",
        "endDate": "2024-08-31",
        "isActive": True,
        "minOrderAmount": 30,
        "maxDiscount": 50,
        "applicableCategories": ["Fiction"],
        "image": "https://images.pexels.com/photos/1029141/pexels-photo-1029141.jpeg",
    },
    {
        "id": 2,
        "title": "New Customer Special",
        "description": "15% off your first order",
        "discountType": "percentage",
        "discountValue": 15,
        "code": "WELCOME15",
        "startDate": "2024-01-01",
        "endDate": "2024-12-31",
        "isActive": True,
        "minOrderAmount": 25,
        "maxDiscount": 30,
        "applicableCategories": [],
        "image": "https://images.pexels.com/photos/159711/books-bookstore-book-reading-159711.jpeg",
    },
    {
        "id": 3,
        "title": "Free Shipping Weekend",
        "description": "Free shipping on all orders over $35",
        "discountType": "free_shipping",
        "discountValue": 0,
        "code": "FREESHIP",
        "startDate": "2024-07-20",
        "endDate": "2024-07-22",
        "isActive": True,
        "minOrderAmount": 35,
        "maxDiscount": 15,
        "applicableCategories": [],
        "image": "https://images.pexels.com/photos/1029141/pexels-photo-1029141.jpeg",
    },
    {
        "id": 4,
        "title": "Mystery Book Bundle",
        "description": "Buy 3 mystery books, get 1 free",
        "discountType": "buy_x_get_y",
        "discountValue": 1,
        "code": "MYSTERY3FOR2",
        "startDate": "2024-07-01",
        "endDate": "2024-07-31",
        "isActive": True,
        "minOrderAmount": 0,
        "maxDiscount": 20,
        "applicableCategories": ["Mystery"],
        "image": "https://images.pexels.com/photos/159711/books-bookstore-book-reading-159711.jpeg",
    },
)

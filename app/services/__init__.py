"""
Services layer - business logic, kept out of the routes.

- geocoding: providers and the async geocoding facade
- report_service: reading hazard reports from Firestore
"""

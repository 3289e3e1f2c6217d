"""
Firestore query helpers.
"""

def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply a single where clause to a Firestore query or collection.

    Usage:
        query = where_filter(collection, "type", "==", "pothole")
        query = where_filter(query, "status", "==", "pending")
    """
    # Positional arguments work across firebase_admin versions.
    return query.where(field_path, op_string, value)

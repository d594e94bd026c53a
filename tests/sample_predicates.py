"""Predicate module used by the registry tests"""

def is_even(row, value, name):
    return value is not None and value % 2 == 0

def same_as_country(row, value, name):
    return {"valid": value == row.get("country"), "message": f"{name} must equal country"}

PREDICATES = {
    "is_even": is_even,
    "same_as_country": same_as_country,
}

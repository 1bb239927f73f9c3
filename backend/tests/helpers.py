"""Payload builders shared by the test modules."""


def window(**overrides) -> dict:
    """48in x 60in slider window at 15/sqft: 20 sq ft, amount 300.00."""
    line = {
        "window_type": "slider",
        "width": 48,
        "height": 60,
        "quantity": 1,
        "price_per_sqft": 15,
        "profile_system": "Domal",
        "glass_type": "5mm clear",
    }
    line.update(overrides)
    return line


def small_window(**overrides) -> dict:
    """24in x 24in at 12.625/sqft: 4 sq ft, amount 50.50."""
    return window(window_type="fixed-left", width=24, height=24, price_per_sqft=12.625, **overrides)


def material(**overrides) -> dict:
    """10 m of track at 75.00: amount 750.00."""
    line = {"description": "Aluminium track", "unit": "m", "qty": 10, "rate": 75}
    line.update(overrides)
    return line


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}

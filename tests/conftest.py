# tests/conftest.py
import os
import sys

import pytest

# project root (the folder holding "fenquote") first on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fenquote.curtain_wall import generate_grid  # noqa: E402
from fenquote.models import Profile  # noqa: E402


@pytest.fixture
def basic_profile():
    """Frame 100/m, sash 80/m, double glass 120/m2, 30% profit."""
    return Profile(
        code="AL-TEST",
        brand="Test",
        name="Test Profile",
        frame_price=100,
        sach_price=80,
        glass_price_double=120,
        base_profit_rate=0.30,
    )


@pytest.fixture
def full_profile():
    return Profile(
        code="AL001",
        brand="Cocoon",
        name="Standard Aluminum Profile",
        frame_price=150,
        frame_price_3=200,
        sach_price=80,
        accessories_2_sach=50,
        accessories_3_sach=75,
        accessories_4_sach=100,
        glass_price_single=120,
        glass_price_double=200,
        glass_price_triple=260,
        glass_price_laminated=240,
        arc_price=300,
        mosquito_price_fixed=60,
        mosquito_price_plisse=120,
        net_price_panda=180,
        base_profit_rate=0.30,
    )


@pytest.fixture
def grid_2x2():
    """4m x 3m wall, 2x2 uniform: every cell 2.0m x 1.5m."""
    return generate_grid(2, 2, 4.0, 3.0)

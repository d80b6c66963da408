"""Route Modules: one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes stay thin; encryption and AI flows live in services/
"""

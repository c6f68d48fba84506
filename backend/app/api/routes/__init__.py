"""Route modules — one APIRouter per resource, each with its own /api prefix."""

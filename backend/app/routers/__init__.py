from .shift_generation import router as shift_generation_router

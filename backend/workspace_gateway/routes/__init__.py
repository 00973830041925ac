from .drive import router as drive_router
from .sheets import router as sheets_router
from .status import router as status_router

__all__ = ["drive_router", "sheets_router", "status_router"]

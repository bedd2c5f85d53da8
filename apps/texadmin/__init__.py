# -*- coding: utf-8 -*-
"""TexAdmin (texture catalog admin) service package.

- Backend: FastAPI (ASGI)
- Data: texture directory + texture_data.json (name/category overrides)
- UI: lightweight admin page (development mode only)
"""

__all__ = ["__version__"]
__version__ = "0.1.0"

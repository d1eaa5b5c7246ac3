# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

# Entry point for ASGI servers, e.g. `uvicorn main:app`
from app.app import app

__all__ = ["app"]

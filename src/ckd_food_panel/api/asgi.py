"""ASGI entrypoint for the CKD food panel API."""

from ckd_food_panel.api.app import create_app
from ckd_food_panel.containers import build_container

app = create_app(build_container())

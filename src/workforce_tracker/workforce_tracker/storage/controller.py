from __future__ import annotations

from flask import Flask, abort, send_file

from ..common.http import login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/uploads/<path:ref>", methods=["GET"], endpoint="uploaded_file")
    @login_required
    def uploaded_file(ref: str):
        path_for = getattr(container.blobs, "path_for", None)
        path = path_for(ref) if path_for else None
        if path is None:
            abort(404, description="File not found")
        return send_file(path)

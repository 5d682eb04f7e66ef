from __future__ import annotations

from flask import Flask, Response, jsonify, request

from ..common.web import json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)
    service = container.upload_service

    @app.post("/api/uploads/request-url", endpoint="upload_request_url")
    @login_required
    def request_url():
        data = json_body()
        destination = service.request_destination(
            kind=data.get("kind"),
            file_name=data.get("name") or "",
            size=data.get("size"),
            content_type=data.get("contentType") or "",
        )
        return jsonify(destination.to_dict())

    @app.put("/api/uploads/file/<object_name>", endpoint="upload_file")
    @login_required
    def upload_file(object_name: str):
        service.receive(object_name=object_name, token=request.args.get("token"), data=request.get_data())
        return jsonify({"objectPath": f"/objects/uploads/{object_name}"})

    @app.get("/objects/uploads/<object_name>", endpoint="serve_object")
    def serve_object(object_name: str):
        stored = service.fetch(object_name)
        return Response(stored.data, mimetype=stored.content_type)

# ultra_eval/api/deps.py
# Process-wide clients are built once in the startup hook and kept on app.state.
from fastapi import Request

from ultra_eval.services.evaluation_service import Evaluator
from ultra_eval.services.storage_service import AttachmentStorage


def get_evaluator(request: Request) -> Evaluator:
    return request.app.state.evaluator


def get_notifier(request: Request):
    return request.app.state.notifier


def get_storage(request: Request) -> AttachmentStorage:
    return request.app.state.storage

from .base import build_response


def data_response(data=None, message: str = None):
    return build_response(200, "success", message=message, data=data)

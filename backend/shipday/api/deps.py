"""
Process-wide handles created in the app lifespan, exposed to routes via Depends.
Tests override these providers with fakes.
"""

from fastapi import Request


def get_realtime(request: Request):
    return request.app.state.realtime


def get_push_client(request: Request):
    return request.app.state.push_client


def get_mailer(request: Request):
    return request.app.state.mailer

"""Greeting, echo and user-agent route handlers."""

from request import USER_AGENT, HTTPRequest, Method
from response import HTTPResponse, Status

ECHO_PATH = "/echo"
ECHO_PREFIX = "/echo/"


def home(request: HTTPRequest) -> HTTPResponse:
    if request.method != Method.GET:
        return HTTPResponse(status=Status.METHOD_NOT_ALLOWED)
    return HTTPResponse.text("Hello World")


def echo(request: HTTPRequest) -> HTTPResponse:
    if request.method == Method.GET:
        _, _, echoed = request.path.partition(ECHO_PREFIX)
        return HTTPResponse.text(echoed.encode("iso-8859-1"))

    if request.method == Method.POST and request.path == ECHO_PATH:
        return HTTPResponse.text(request.body)

    return HTTPResponse(status=Status.METHOD_NOT_ALLOWED)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    if request.method != Method.GET:
        return HTTPResponse(status=Status.METHOD_NOT_ALLOWED)

    agent = request.headers.get(USER_AGENT)
    if agent is None:
        return HTTPResponse(status=Status.BAD_REQUEST)
    return HTTPResponse.text(agent.encode("iso-8859-1"))

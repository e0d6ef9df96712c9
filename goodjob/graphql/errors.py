"""
GraphQL errors.

Clients match on `extensions.code`, the same codes Apollo servers use.
"""

from contextlib import contextmanager

from graphql import GraphQLError

from goodjob.core.errors import GoodJobError

BAD_USER_INPUT = "BAD_USER_INPUT"
UNAUTHENTICATED = "UNAUTHENTICATED"


def user_input_error(message: str) -> GraphQLError:
    return GraphQLError(message, extensions={"code": BAD_USER_INPUT})


def authentication_error(message: str = "Unauthorized") -> GraphQLError:
    return GraphQLError(message, extensions={"code": UNAUTHENTICATED})


@contextmanager
def graphql_errors():
    """Re-raise service errors as GraphQL errors (401 -> UNAUTHENTICATED)."""
    try:
        yield
    except GoodJobError as e:
        if e.status_code == 401:
            raise authentication_error(str(e.message)) from e
        raise user_input_error(str(e.message)) from e

"""
GraphQL module - strawberry schema mounted at /graphql.

Usage:
    from goodjob.graphql.schema import create_graphql_router
    app.include_router(create_graphql_router(), prefix="/graphql")
"""

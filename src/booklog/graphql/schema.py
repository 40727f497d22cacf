"""
Main GraphQL schema definition using Strawberry
"""

import strawberry
from fastapi import HTTPException
from graphql import validate_schema as gql_validate_schema
from starlette.requests import HTTPConnection
from strawberry.fastapi import GraphQLRouter
from strawberry.subscriptions import GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL

from ..config import settings
from ..logging import get_logger
from .context import GraphQLContext
from .errors import BooklogError, ErrorMaskingExtension
from .mutations.root import Mutation
from .queries.root import Query
from .subscriptions.root import Subscription

logger = get_logger(__name__)

# Create the GraphQL schema
schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    subscription=Subscription,
    extensions=[ErrorMaskingExtension],
)


def validate_schema() -> None:
    """Validate the GraphQL schema at startup.

    This ensures that all type references can be resolved, causing the
    server to fail fast rather than erroring at runtime.

    Raises:
        Exception: If the schema is invalid or has unresolved types
    """
    try:
        graphql_schema = schema._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")

        # Check that introspection query works (catches most resolution issues)
        from graphql import get_introspection_query, graphql_sync

        result = graphql_sync(graphql_schema, get_introspection_query())

        if result.errors:
            error_messages = [str(e) for e in result.errors]
            raise Exception(f"GraphQL introspection failed: {'; '.join(error_messages)}")

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise


async def get_context(connection: HTTPConnection) -> GraphQLContext:
    """Build the context for one HTTP request or one WebSocket connection.

    HTTP requests resolve the caller up front, so a credential that fails
    verification fails the whole request with 401. WebSocket connections
    resolve lazily because the credential may arrive in the init payload.
    """
    state = connection.app.state
    context = GraphQLContext(
        store=state.store,
        broadcaster=state.broadcaster,
        signer=state.signer,
    )

    if connection.scope["type"] == "http":
        context.request = connection  # type: ignore[assignment]
        try:
            await context.get_auth()
        except BooklogError as e:
            logger.warning("Rejected request with invalid credential", error=e.message)
            raise HTTPException(
                status_code=401,
                detail=e.to_payload(),
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

    return context


# Create the GraphQL router for FastAPI integration
def create_graphql_router() -> GraphQLRouter[GraphQLContext, None]:
    """Create a GraphQL router for FastAPI serving queries, mutations and subscriptions."""
    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if settings.graphiql else None,
        context_getter=get_context,
        subscription_protocols=[GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL],
    )

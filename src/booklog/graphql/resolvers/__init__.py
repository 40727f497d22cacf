"""Resolver functions backing the GraphQL types, queries, mutations and subscriptions."""

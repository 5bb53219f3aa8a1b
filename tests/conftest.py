import pytest
from graphql import build_schema
from graphql.utilities import introspection_from_schema

SCHEMA_SDL = """
  interface Node {
    id: ID!
  }

  type User implements Node {
    id: ID!
    name: String!
    age: Int
    todos: [Todo]
  }

  type Todo implements Node {
    id: ID!
    text: String!
    done: Boolean
    creator: User
  }

  union Search = User | Todo

  type Settings {
    theme: String!
    location: Location
  }

  type Location {
    city: String
  }

  type Query {
    todos(first: Int): [Todo]
    users: [User]
    me: User
    node(id: ID!): Node
    search(term: String): [Search]
    settings: Settings
  }

  type Mutation {
    addTodo(text: String!): Todo
    toggleTodo(id: ID!): Todo
  }
"""


@pytest.fixture
def sdl() -> str:
    return SCHEMA_SDL


@pytest.fixture
def introspection() -> dict:
    return introspection_from_schema(build_schema(SCHEMA_SDL))

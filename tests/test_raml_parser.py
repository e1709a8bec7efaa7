from pathlib import Path

import pytest

from api_interface_gen.errors import DescriptionError
from api_interface_gen.parser.raml import parse_raml, parse_raml_text

FIXTURES = Path(__file__).parent / "fixtures"


class TestRamlParser:
    def test_document_metadata(self):
        description = parse_raml(FIXTURES / "library.raml")
        assert description.title == "Library API"
        assert description.base_uri == "http://library.example.com/api"

    def test_resource_tree(self):
        description = parse_raml(FIXTURES / "library.raml")
        assert [r.relative_uri for r in description.resources] == ["/books", "/health"]
        books = description.resources[0]
        assert books.resource_type == "collection"
        assert books.traits == ["secured"]
        assert [a.method for a in books.actions] == ["GET", "POST"]
        assert books.resources[0].full_path == "/books/{bookId}"

    def test_parameters(self):
        books = parse_raml(FIXTURES / "library.raml").resources[0]
        author = books.actions[0].query_parameters["author"]
        assert author.description == "Filter by author"
        assert author.example == "Tolkien"
        book_id = books.resources[0].uri_parameters["bookId"]
        assert book_id.type.name == "int"

    def test_response_headers(self):
        get_books = parse_raml(FIXTURES / "library.raml").resources[0].actions[0]
        headers = get_books.responses["200"].headers
        assert list(headers) == ["X-Total-Count", "X-Tags", "X-Meta-{?}"]
        assert headers["X-Tags"].repeated is True
        assert headers["X-Total-Count"].type.name == "int"

    def test_body_types(self):
        books = parse_raml(FIXTURES / "library.raml").resources[0]
        assert books.actions[0].responses["200"].body["application/json"].type.render() == "list[Book]"
        assert books.actions[1].body["application/xml"].type.name == "Book"
        by_id = books.resources[0].actions[0].responses["200"].body
        assert by_id["text/plain"].type.name == "str"
        assert by_id["application/json"].example == '{"title": "The Hobbit"}'

    def test_templates(self):
        description = parse_raml(FIXTURES / "library.raml")
        resource_types = description.resource_types[0]
        assert resource_types["collection"].parameters == ["sortParam"]
        assert [name for traits in description.traits for name in traits] == ["secured", "paged", "async"]
        assert description.traits[0]["secured"].parameters == ["tokenName"]

    def test_parameterised_trait_reference(self):
        description = parse_raml_text(
            "title: T\n/items:\n  is: [secured, {paged: {size: 10}}]\n  get:\n"
        )
        assert description.resources[0].traits == ["secured", "paged"]

    def test_unresolved_body_type(self):
        description = parse_raml_text(
            "/files:\n  get:\n    responses:\n      200:\n        body:\n          application/pdf:\n"
        )
        body = description.resources[0].actions[0].responses["200"].body
        assert body["application/pdf"].type is None

    def test_json_without_schema(self):
        description = parse_raml_text("/items:\n  post:\n    body:\n      application/json:\n")
        assert description.resources[0].actions[0].body["application/json"].type.render() == "dict[str, typing.Any]"

    def test_invalid_yaml(self):
        with pytest.raises(DescriptionError):
            parse_raml_text("title: [unclosed\n")

    def test_not_a_mapping(self):
        with pytest.raises(DescriptionError):
            parse_raml_text("- just\n- a list\n")

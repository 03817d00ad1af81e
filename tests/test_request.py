import pytest

import graphql

from graphjoiner import exc, ExecutionSettings
from graphjoiner.request import Request
from graphjoiner.integration.graphql import request_from_graphql_document

from tests.util.library import library_types


def build(root, query: str, variables: dict = None, **kwargs) -> Request:
    return request_from_graphql_document(graphql.parse(query), root, variables, **kwargs)


def test_request_tree():
    """ Test: request tree structure """
    lib = library_types()
    request = build(lib.Root, '''
        {
            wodehouse: author(id: 1) {
                name
                books { title }
            }
        }
    ''')

    # Operation
    assert request.field_name is None
    assert request.key is None
    assert request.args == {}

    # Root field
    author, = request.selections
    assert author.field_name == 'author'
    assert author.key == 'wodehouse'
    assert author.args == {'id': 1}
    assert author.field is lib.Root.fields()['author']

    # Nested fields
    name, books = author.selections
    assert name.key == 'name'
    assert name.field is lib.Author.fields()['name']
    assert name.selections == ()
    assert books.field is lib.Author.fields()['books']
    assert [s.key for s in books.selections] == ['title']

    # Join selections are added by relationships, not by the builder
    assert books.join_selections == ()


def test_request_fragments_are_inlined():
    """ Test: fragments produce the same tree as inline selections """
    lib = library_types()

    inline = build(lib.Root, '{ books { title author { name } } }')
    spread = build(lib.Root, '''
        { books { ...BookFields } }
        fragment BookFields on Book { title ...BookAuthor }
        fragment BookAuthor on Book { author { name } }
    ''')
    inline_fragment = build(lib.Root, '{ books { ... on Book { title } ... { author { name } } } }')

    assert spread == inline
    assert inline_fragment == inline


def test_request_merges_same_key():
    """ Test: selections with the same key are merged, in order of appearance """
    lib = library_types()
    request = build(lib.Root, '''
        {
            author(id: 1) {
                books { title }
                name
                books { id title }
            }
        }
    ''')

    author, = request.selections
    books, name = author.selections
    assert [s.key for s in books.selections] == ['title', 'id']


@pytest.mark.parametrize(('query', 'variables', 'expected_keys'), [
    ('{ author(id: 1) { id name @include(if: true) } }', {}, ['id', 'name']),
    ('{ author(id: 1) { id name @include(if: false) } }', {}, ['id']),
    ('{ author(id: 1) { id name @skip(if: true) } }', {}, ['id']),
    ('{ author(id: 1) { id name @skip(if: false) } }', {}, ['id', 'name']),
    ('query($x: Boolean!) { author(id: 1) { id name @include(if: $x) } }', {'x': False}, ['id']),
    ('query($x: Boolean!) { author(id: 1) { id name @skip(if: $x) } }', {'x': False}, ['id', 'name']),
    # Both: included only when @include says yes and @skip says no
    ('{ author(id: 1) { id name @include(if: true) @skip(if: true) } }', {}, ['id']),
    # Directives on fragments
    ('{ author(id: 1) { id ... @skip(if: true) { name } } }', {}, ['id']),
    ('{ author(id: 1) { id ...F @include(if: false) } } fragment F on Author { name }', {}, ['id']),
])
def test_request_directives(query: str, variables: dict, expected_keys: list):
    lib = library_types()
    request = build(lib.Root, query, variables)

    author, = request.selections
    assert [s.key for s in author.selections] == expected_keys


def test_request_variables():
    lib = library_types()

    # Provided
    request = build(lib.Root, 'query($id: Int) { author(id: $id) { name } }', {'id': 2})
    assert request.selections[0].args == {'id': 2}

    # Default
    request = build(lib.Root, 'query($id: Int = 1) { author(id: $id) { name } }')
    assert request.selections[0].args == {'id': 1}

    # Not provided: no argument at all
    request = build(lib.Root, 'query($id: Int) { author(id: $id) { name } }')
    assert request.selections[0].args == {}


def test_request_enum_variables():
    """ Test: variables are coerced the way literals are """
    from graphjoiner import JoinType, RootJoinType, many
    from graphjoiner.sources.objects import field, fetch_immediates_from_objects

    Color = graphql.GraphQLEnumType('Color', {'RED': 1, 'GREEN': 2})
    Thing = JoinType('Thing', lambda: {
        'name': field(graphql.GraphQLString),
        'color': field(Color),
    }, fetch_immediates_from_objects)
    Root = RootJoinType('Query', lambda: {
        'things': many(Thing, lambda request, _: [], args={'color': Color}),
    })

    # Literal, variable, variable default: all give the internal value
    for query, variables in [
        ('{ things(color: RED) { name } }', {}),
        ('query($c: Color) { things(color: $c) { name } }', {'c': 'RED'}),
        ('query($c: Color = RED) { things(color: $c) { name } }', {}),
    ]:
        request = build(Root, query, variables)
        assert request.selections[0].args == {'color': 1}, query


def test_request_invalid_variables():
    lib = library_types()

    # Wrong type
    with pytest.raises(exc.InvalidVariablesError) as e:
        build(lib.Root, 'query Q($id: Int) { author(id: $id) { name } }', {'id': 'one'})
    assert e.value.operation_name == 'Q'
    assert len(e.value.messages) == 1

    # It's an argument error
    assert isinstance(e.value, exc.InvalidArgumentError)
    assert isinstance(e.value, exc.QueryError)

    # Required, not provided
    with pytest.raises(exc.InvalidVariablesError) as e:
        build(lib.Root, 'query($id: Int!) { author(id: $id) { name } }')
    assert e.value.operation_name is None


def test_request_operation_name():
    lib = library_types()
    query = '''
        query a { author(id: 1) { name } }
        query b { books { title } }
    '''

    assert build(lib.Root, query).selections[0].field_name == 'author'
    assert build(lib.Root, query, operation_name='b').selections[0].field_name == 'books'

    with pytest.raises(exc.QueryError):
        build(lib.Root, query, operation_name='c')


@pytest.mark.parametrize(('query', 'variables', 'expected_error'), [
    ('{ author(id: 1) { isbn } }', {}, exc.UnknownFieldError),
    ('{ nothing }', {}, exc.UnknownFieldError),
    ('{ author(id: 1) { name @deprecated } }', {}, exc.UnknownDirectiveError),
    ('{ author(id: 1) { ...F } }', {}, exc.UnknownFragmentError),
    ('{ author(id: 1) { ...A } } fragment A on Author { ...B } fragment B on Author { ...A }', {}, exc.FragmentCycleError),
    ('{ author(id: "one") { name } }', {}, exc.InvalidArgumentError),
    ('{ author(id: 1) { name { first } } }', {}, exc.QueryError),
])
def test_request_errors(query: str, variables: dict, expected_error: type):
    lib = library_types()

    with pytest.raises(expected_error):
        build(lib.Root, query, variables)


def test_request_error_details():
    lib = library_types()

    with pytest.raises(exc.UnknownFieldError) as e:
        build(lib.Root, '{ author(id: 1) { isbn } }')
    assert e.value.type_name == 'Author'
    assert e.value.field_name == 'isbn'

    with pytest.raises(exc.FragmentCycleError) as e:
        build(lib.Root, '{ author(id: 1) { ...A } } fragment A on Author { ...B } fragment B on Author { ...A }')
    assert e.value.fragment_names == ('A', 'B', 'A')

    with pytest.raises(exc.UnknownDirectiveError) as e:
        build(lib.Root, '{ author(id: 1) { name @deprecated } }')
    assert e.value.directive_name == 'deprecated'


@pytest.mark.parametrize(('max_depth', 'query', 'ok'), [
    (None, '{ books { author { books { author { name } } } } }', True),
    (2, '{ books { title } }', True),
    (2, '{ books { author { name } } }', False),
    (3, '{ books { author { name } } }', True),
    (3, '{ books { author { books { title } } } }', False),
])
def test_request_max_depth(max_depth, query: str, ok: bool):
    lib = library_types()
    settings = ExecutionSettings(max_depth=max_depth)

    if ok:
        build(lib.Root, query, settings=settings)
    else:
        with pytest.raises(exc.QueryDepthError):
            build(lib.Root, query, settings=settings)

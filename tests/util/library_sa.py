""" The test library: authors and books, in an SQL database """

import sqlalchemy as sa

from graphjoiner import JoinType, RootJoinType, single, many, extract
from graphjoiner.sources.sa_select import column, fetch_immediates_from_select, select_children, graphql_type_for_column
from graphjoiner.testing import insert

from .library import ALL_AUTHORS, ALL_BOOKS, Library


metadata = sa.MetaData()

author_table = sa.Table(
    'author', metadata,
    sa.Column('id', sa.Integer, primary_key=True),
    sa.Column('name', sa.String),
)

book_table = sa.Table(
    'book', metadata,
    sa.Column('id', sa.Integer, primary_key=True),
    sa.Column('title', sa.String),
    sa.Column('genre', sa.String),
    sa.Column('author_id', sa.Integer, sa.ForeignKey(author_table.c.id)),
)


def insert_library(connection: sa.engine.Connection):
    """ Insert the same authors & books that the objects library has """
    insert(connection, author_table, *ALL_AUTHORS)
    insert(connection, book_table, *(
        dict(id=book['id'], title=book['title'], genre=book['genre'], author_id=book['authorId'])
        for book in ALL_BOOKS
    ))


def library_types(connection: sa.engine.Connection) -> Library:
    """ Make join types for the library that read from the database """
    fetch_immediates = fetch_immediates_from_select(connection)

    def author_fields():
        books = many(
            Book,
            lambda request, authors: select_children(authors, author_table.c.id, book_table, book_table.c.author_id),
            {'id': 'authorId'},
        )
        return {
            'id': column(author_table.c.id),
            'name': column(author_table.c.name),
            'books': books,
            'bookTitles': extract(books, 'title'),
        }

    def book_fields():
        author = single(
            Author,
            lambda request, books: select_children(books, book_table.c.author_id, author_table, author_table.c.id),
            {'authorId': 'id'},
        )
        return {
            'id': column(book_table.c.id),
            'title': column(book_table.c.title),
            'genre': column(book_table.c.genre),
            'authorId': column(book_table.c.author_id),
            'author': author,
            'booksBySameAuthor': extract(author, 'books'),
        }

    def root_fields():
        return {
            'books': many(Book, select_books, args={'genre': graphql_type_for_column(book_table.c.genre)}),
            'book': single(Book, select_book, args={'id': graphql_type_for_column(book_table.c.id)}),
            'author': single(Author, select_author, args={'id': graphql_type_for_column(author_table.c.id)}),
        }

    Author = JoinType('Author', author_fields, fetch_immediates)
    Book = JoinType('Book', book_fields, fetch_immediates)
    Root = RootJoinType('Query', root_fields)
    return Library(Root=Root, Author=Author, Book=Book)


def select_books(request, _):
    stmt = sa.select(book_table)

    genre = request.args.get('genre')
    if genre is not None:
        stmt = stmt.where(book_table.c.genre == genre)

    return stmt


def select_book(request, _):
    stmt = sa.select(book_table)

    book_id = request.args.get('id')
    if book_id is not None:
        stmt = stmt.where(book_table.c.id == book_id)

    return stmt


def select_author(request, _):
    stmt = sa.select(author_table)

    author_id = request.args.get('id')
    if author_id is not None:
        stmt = stmt.where(author_table.c.id == author_id)

    return stmt

""" Data sources: implementations of the immediate fetch callback

* objects: Python objects and dicts
* sa_select: SqlAlchemy Core SELECT statements
"""

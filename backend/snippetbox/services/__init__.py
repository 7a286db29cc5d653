# Services package init
"""
Snippetbox — Services Layer
=============================

What:  Storage capability interfaces and their implementations, sitting
       between routes (HTTP) and the database.

Service Inventory:
    - base.py:            SnippetStore / UserStore interfaces
    - snippet_service.py: SqlSnippetStore
    - user_service.py:    SqlUserStore
    - memory.py:          InMemorySnippetStore / InMemoryUserStore
    - session_store.py:   Session, SessionManager, SQL and in-memory session stores
    - passwords.py:       bcrypt hashing in the threadpool

Routes only see the interfaces, through app.state and the dependencies in
snippetbox.dependencies, so either implementation can back a running app.
"""

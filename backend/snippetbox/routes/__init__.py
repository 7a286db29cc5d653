# Routes package init
"""
Snippetbox — Routes Package
=============================

What:  HTML route handlers.

Route Inventory:
    - pages.py:     GET  /                          (latest snippets)
                    GET  /about
    - snippets.py:  GET  /snippet/view/{id}
                    GET  /snippet/create            (authenticated)
                    POST /snippet/create            (authenticated)
    - users.py:     GET  /user/signup, POST /user/signup
                    GET  /user/login,  POST /user/login
                    POST /user/logout               (authenticated)
    - account.py:   GET  /account/view              (authenticated)
                    GET  /account/password/update   (authenticated)
                    POST /account/password/update   (authenticated)
    - health.py:    GET  /ping

Handler shapes:
    Display (GET):  template data → render 200
    Submit (POST):  decode form (400) → validate (422 re-render)
                    → store call (domain error → 422 re-render)
                    → session update → 303 redirect

    Handlers stay thin: storage lives behind the store interfaces in
    services/, validation in schemas/forms.py, rendering in render.py.
"""

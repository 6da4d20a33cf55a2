# Routes package init
"""
StudyNotes Backend: API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource or action.

Route Inventory:
    - summarize.py: POST   /api/summarize         (upload a study file and summarize it)
                    POST   /api/summarize/retry   (summarize an existing note again)
    - notes.py:     GET    /api/notes             (list notes with pagination)
                    GET    /api/notes/{id}        (get single note detail)
                    DELETE /api/notes/{id}        (delete note and its file)
    - search.py:    GET    /api/search?q=         (full-text search)
    - health.py:    GET    /health                (service health check)

Routes stay thin: extract request data, call a service, shape the response.
Business logic belongs in services.
"""

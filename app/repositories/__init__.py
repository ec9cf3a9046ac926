"""
Repositories package
Separate database queries from models

Each repository encapsulates database operations for a model:
- shareholder_repository.py
- verification_session_repository.py
- verification_event_repository.py

Usage:
    from repositories.shareholder_repository import ShareholderRepository
    shareholder = ShareholderRepository.get_by_uuid(identifier)
"""

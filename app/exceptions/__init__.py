# app/exceptions/__init__.py

from exceptions.domain_exceptions import (
    DomainException,
    NotFoundException,
    ConflictException,
    UnauthorizedException,
    ValidationException,
    InternalServerException,
    HashingException,
    PersistenceException
)

__all__ = [
    'DomainException',
    'NotFoundException',
    'ConflictException',
    'UnauthorizedException',
    'ValidationException',
    'InternalServerException',
    'HashingException',
    'PersistenceException'
]

"""
Companies Component
"""
from .routes import companies_bp, init_companies
from .service import CompaniesService

__all__ = ['companies_bp', 'init_companies', 'CompaniesService']

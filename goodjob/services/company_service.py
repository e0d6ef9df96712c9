"""
Company Service - resolve the company a record belongs to.

Users either pick a company from autocomplete (we get its tax id) or type
a free-text name. Names are stored upper-cased.
"""

from typing import Optional

from goodjob.core.errors import HttpError
from goodjob.services.mongo_service import CompanyModel


def _first_name(name):
    # some catalogue rows keep several registered names
    if isinstance(name, list):
        return name[0]
    return name


def get_company_name(company_model: CompanyModel, company_id: str) -> str:
    results = company_model.find_by_id(company_id)
    if len(results) == 0:
        raise HttpError("統一編號不存在", 422)
    return _first_name(results[0]["name"])


def get_company_by_query(company_model: CompanyModel, company_query: str) -> dict:
    """
    Match the query against company names and ids.

    Only a unique match gives us the id; otherwise we keep the typed name.
    """
    results = company_model.find_by_name_or_id(company_query)
    if len(results) == 1:
        return {
            "id": results[0]["id"],
            "name": _first_name(results[0]["name"]),
        }
    return {"name": company_query.upper()}


def get_company_by_id_or_query(
    company_model: CompanyModel,
    company_id: Optional[str],
    company_query: Optional[str]
) -> dict:
    if company_id:
        return {
            "id": company_id,
            "name": get_company_name(company_model, company_id),
        }
    return get_company_by_query(company_model, company_query)

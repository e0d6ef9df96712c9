"""
GoodJob WorkTime Survey Backend
Salary / working-time and experience sharing platform.

Architecture:
- MongoDB: users, workings (salary & working time), experiences, keywords
- FastAPI: REST endpoints under /
- Strawberry: GraphQL endpoint under /graphql
- Facebook / Google: login only, the platform issues its own JWT
"""

__version__ = "1.0.0"

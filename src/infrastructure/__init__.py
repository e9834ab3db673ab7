"""Infrastructure layer: persistence for accounts, tax profiles and invoices.

- **database**: engine/session lifecycle, declarative models, the generic
  repository and store error translation
- **repositories**: one repository per entity with its list filters
"""

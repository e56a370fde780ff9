"""Flask blueprint package for EntInvoicing routes.

Blueprints are defined in the sibling modules (e.g., ``invoicing_routes``)
and registered in :mod:`entinvoicing.__init__`.
"""

"""
auth — User authentication module.

Provides:
  • Signed, one-hour token issuance & verification
  • Password hashing (bcrypt)
  • Register / Login gateway and API routes
  • ``get_current_identity`` FastAPI access guard
"""

"""
Services package
Business rules of the verification flow, one module per component:
- qr_check_service.py: scan -> shareholder + visit session
- verification_code_service.py: phone code issuance with resend cooldown
- verification_service.py: phone code / ID suffix verification
- contact_service.py: contact-detail diffing and profile reads
- audit_service.py: append-only event stream and session projection
"""

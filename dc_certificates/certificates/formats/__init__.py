# dc_certificates/certificates/formats/__init__.py

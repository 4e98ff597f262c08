# dc_certificates/certificates/__init__.py
# Certificate hierarchy building blocks: keys, serials, subjects, extensions, issuance

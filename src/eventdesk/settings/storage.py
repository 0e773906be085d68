from decouple import config

STORAGES = {
    "default": {
        "BACKEND": config("DEFAULT_FILE_STORAGE_BACKEND", default="django.core.files.storage.FileSystemStorage"),
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

# Payment proofs live under the protected prefix so they are only reachable through signed URLs.
PAYMENT_PROOF_UPLOAD_DIR = config("PAYMENT_PROOF_UPLOAD_DIR", default="protected/payment-proofs")
PAYMENT_PROOF_MAX_BYTES = config("PAYMENT_PROOF_MAX_BYTES", default=5 * 1024 * 1024, cast=int)

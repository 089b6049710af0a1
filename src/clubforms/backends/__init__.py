"""Hosted service backends.

`SupabaseDocumentStore` lives in `clubforms.backends.supabase_store` and needs
the `supabase` extra, so it is not imported here.
"""

from clubforms.backends.cloudinary import CloudinaryStorage, sign_params
from clubforms.typing.protocol import DocumentStore, MediaStorage, ObjectStorage

__all__ = [
    "CloudinaryStorage",
    "DocumentStore",
    "MediaStorage",
    "ObjectStorage",
    "sign_params",
]

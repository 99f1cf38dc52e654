"""Builders and fakes for SharePoint, Blob Storage and inventory rows."""

import os

from azure.core.exceptions import AzureError

from migration.models import FileRecord

SITE_A = "https://contoso.sharepoint.com/sites/archive-a"
SITE_B = "https://contoso.sharepoint.com/sites/archive-b"
COLUMNS = ["Name", "Location", "Size (MB)", "Site Address"]


def make_record(name: str = "backup-01.zip", site: str = SITE_A, folder: str = "Shared Documents/2019",
                size_mb: float = 12.5) -> FileRecord:
    return FileRecord(
        name=name,
        location=f"{site}/{folder}/{name}",
        size_mb=size_mb,
        site_address=site,
    )


def inventory_row(name: str, site: str = SITE_A, folder: str = "Shared Documents/2019", size_mb: float = 12.5):
    return [name, f"{site}/{folder}/{name}", size_mb, site]


# ------------------------------------------------------------------
# SharePoint / Blob fakes
# ------------------------------------------------------------------


class _Query:
    def __init__(self, action):
        self.action = action

    def execute_query(self):
        self.action()
        return self


class FakeFile:
    def __init__(self, ctx, path):
        self.ctx = ctx
        self.path = path

    def download(self, fh):
        return _Query(lambda: self.ctx.serve(self.path, fh))


class FakeWeb:
    def __init__(self, ctx):
        self.ctx = ctx

    def get(self):
        return _Query(self.ctx.connect)

    def get_file_by_server_relative_url(self, path):
        return FakeFile(self.ctx, path)


class FakeContext:
    """Stands in for office365 ClientContext bound to one site."""

    def __init__(self, sharepoint, address):
        self.sharepoint = sharepoint
        self.address = address
        self.web = FakeWeb(self)
        self.auth = None
        self.credential = None

    def with_client_certificate(self, tenant, client_id, thumbprint, cert_path=None, passphrase=None):
        self.auth = "certificate"
        self.credential = (tenant, client_id, thumbprint, cert_path)
        return self

    def with_credentials(self, credential):
        self.auth = "delegated"
        self.credential = credential
        return self

    def connect(self):
        if self.address in self.sharepoint.unreachable:
            raise RuntimeError("401 Unauthorized")
        self.sharepoint.opened.append(self.address)

    def serve(self, path, fh):
        self.sharepoint.downloads.append(path)
        if any(path.endswith(name) for name in self.sharepoint.missing):
            fh.write(b"partial")
            raise RuntimeError("404 File Not Found")
        fh.write(self.sharepoint.content)

    def clear(self):
        self.sharepoint.closed.append(self.address)
        if self.sharepoint.fail_close:
            raise RuntimeError("connection reset")
        return self


class FakeSharePoint:
    """Context factory recording opened/closed sites and downloads."""

    def __init__(self, unreachable=(), missing=(), content=b"x" * 2048, fail_close=False):
        self.unreachable = set(unreachable)
        self.missing = set(missing)
        self.content = content
        self.fail_close = fail_close
        self.contexts = []
        self.opened = []
        self.closed = []
        self.downloads = []

    def __call__(self, address):
        ctx = FakeContext(self, address)
        self.contexts.append(ctx)
        return ctx


class FakeBlobStorage:
    """Records uploads; raises AzureError for file names listed in ``fail``."""

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.uploads = {}
        self.staged_paths = []

    def upload_file(self, local_path, blob_name, overwrite=True):
        assert os.path.exists(local_path)
        self.staged_paths.append(local_path)
        if any(blob_name.endswith(name) for name in self.fail):
            raise AzureError("The specified container is being deleted")
        with open(local_path, "rb") as fh:
            self.uploads[blob_name] = fh.read()
        return f"https://acct.blob.core.windows.net/archive/{blob_name}"


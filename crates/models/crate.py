from django.db import models


class Crate(models.Model):
    """
    Represents a crate (e.g., 'rand', 'serde').
    This is the top-level entity that contains multiple releases.
    """
    name = models.CharField(max_length=255, unique=True, db_index=True)

    # Every version ever ingested, in the order it was first seen
    versions = models.JSONField(default=list, blank=True)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'crates'
        ordering = ['name']

    def __str__(self):
        return self.name

    def add_version(self, version):
        """
        Append version to the known versions unless it is already listed.

        Returns True if the list changed.
        """
        if version in self.versions:
            return False
        self.versions = list(self.versions) + [version]
        return True

    def latest_release(self):
        """Get the most recently published release"""
        return self.releases.order_by('-release_time', '-id').first()

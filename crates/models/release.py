from django.db import models


class BuildStatus(models.IntegerChoices):
    FAILED = -1, 'Failed'
    UNTRIED = 0, 'Not tried'
    SUCCEEDED = 1, 'Succeeded'


class Release(models.Model):
    """
    Represents a specific version of a crate (e.g., 'rand/0.3.14').
    Holds the manifest metadata, registry data and documentation build status.
    """
    crate = models.ForeignKey('Crate', on_delete=models.CASCADE, related_name='releases')
    version = models.CharField(max_length=100, db_index=True)

    # Registry data
    release_time = models.DateTimeField(null=True, blank=True)
    yanked = models.BooleanField(null=True, blank=True)
    downloads = models.IntegerField(null=True, blank=True)

    # Build results
    build_status = models.IntegerField(choices=BuildStatus.choices, default=BuildStatus.UNTRIED)
    rustdoc_status = models.IntegerField(default=0)
    test_status = models.IntegerField(default=0)

    # Manifest metadata
    dependencies = models.JSONField(default=list, blank=True,
                                    help_text="[name, version requirement] pairs")
    license = models.TextField(null=True, blank=True)
    repository_url = models.TextField(null=True, blank=True)
    homepage_url = models.TextField(null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    description_long = models.TextField(null=True, blank=True,
                                        help_text="Crate-level doc comment of the primary target")
    readme = models.TextField(null=True, blank=True)
    authors = models.JSONField(default=list, blank=True)
    keywords = models.JSONField(default=list, blank=True)
    have_examples = models.BooleanField(default=False)

    class Meta:
        db_table = 'releases'
        ordering = ['-release_time', '-id']
        unique_together = ['crate', 'version']

    def __str__(self):
        return f"{self.crate.name}/{self.version}"

    def canonical_name(self):
        return f"{self.crate.name}-{self.version}"

from django.db import models


class Owner(models.Model):
    """
    A registry account that owns one or more crates.
    """
    login = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    avatar = models.TextField(blank=True, null=True)
    name = models.TextField(blank=True, null=True)
    email = models.TextField(blank=True, null=True)
    crates = models.ManyToManyField('Crate', through='OwnerRel', related_name='owners')

    class Meta:
        db_table = 'owners'
        ordering = ['login']

    def __str__(self):
        return self.login


class OwnerRel(models.Model):
    crate = models.ForeignKey('Crate', on_delete=models.CASCADE, db_column='cid')
    owner = models.ForeignKey('Owner', on_delete=models.CASCADE, db_column='oid')

    class Meta:
        db_table = 'owner_rels'
        unique_together = ['crate', 'owner']

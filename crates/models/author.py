from django.db import models


class Author(models.Model):
    """
    A person listed in the authors field of a crate manifest.
    Deduplicated by the slug of their name.
    """
    name = models.TextField()
    email = models.TextField(blank=True, null=True)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    releases = models.ManyToManyField('Release', through='AuthorRel', related_name='author_set')

    class Meta:
        db_table = 'authors'
        ordering = ['name']

    def __str__(self):
        return self.name


class AuthorRel(models.Model):
    release = models.ForeignKey('Release', on_delete=models.CASCADE, db_column='rid')
    author = models.ForeignKey('Author', on_delete=models.CASCADE, db_column='aid')

    class Meta:
        db_table = 'author_rels'
        unique_together = ['release', 'author']

from django.db import models


class Keyword(models.Model):
    """
    Keywords for categorizing crates. "Async IO" and "async-io" share a slug
    and therefore a row.
    """
    name = models.TextField()
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    releases = models.ManyToManyField('Release', through='KeywordRel', related_name='keyword_set')

    class Meta:
        db_table = 'keywords'
        ordering = ['slug']

    def __str__(self):
        return self.name

    def release_count(self):
        return self.releases.count()


class KeywordRel(models.Model):
    release = models.ForeignKey('Release', on_delete=models.CASCADE, db_column='rid')
    keyword = models.ForeignKey('Keyword', on_delete=models.CASCADE, db_column='kid')

    class Meta:
        db_table = 'keyword_rels'
        unique_together = ['release', 'keyword']

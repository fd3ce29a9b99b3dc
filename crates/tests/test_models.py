"""
Tests for cratesdocs models
"""
import datetime

from django.db import IntegrityError
from django.test import TestCase

from crates.models import Author, AuthorRel, Crate, Keyword, KeywordRel, Owner, OwnerRel, Release
from crates.models.release import BuildStatus


class CrateModelTests(TestCase):
    """Tests for the Crate model"""

    def setUp(self):
        self.crate = Crate.objects.create(name='rand')

    def test_crate_str_representation(self):
        self.assertEqual(str(self.crate), 'rand')

    def test_versions_default_empty(self):
        self.assertEqual(self.crate.versions, [])

    def test_crate_unique_name(self):
        with self.assertRaises(IntegrityError):
            Crate.objects.create(name='rand')

    def test_add_version(self):
        """New versions are appended once, in first-seen order"""
        self.assertTrue(self.crate.add_version('0.3.14'))
        self.assertTrue(self.crate.add_version('0.3.13'))
        self.assertFalse(self.crate.add_version('0.3.14'))
        self.crate.save()

        self.crate.refresh_from_db()
        self.assertEqual(self.crate.versions, ['0.3.14', '0.3.13'])

    def test_latest_release(self):
        Release.objects.create(crate=self.crate, version='0.3.13',
                               release_time=datetime.datetime(2016, 1, 9, tzinfo=datetime.timezone.utc))
        Release.objects.create(crate=self.crate, version='0.3.14',
                               release_time=datetime.datetime(2016, 2, 12, tzinfo=datetime.timezone.utc))

        self.assertEqual(self.crate.latest_release().version, '0.3.14')

    def test_latest_release_none(self):
        self.assertIsNone(self.crate.latest_release())


class ReleaseModelTests(TestCase):
    """Tests for the Release model"""

    def setUp(self):
        self.crate = Crate.objects.create(name='rand')
        self.release = Release.objects.create(crate=self.crate, version='0.3.14')

    def test_release_str_representation(self):
        self.assertEqual(str(self.release), 'rand/0.3.14')

    def test_canonical_name(self):
        self.assertEqual(self.release.canonical_name(), 'rand-0.3.14')

    def test_defaults(self):
        self.assertEqual(self.release.build_status, BuildStatus.UNTRIED)
        self.assertEqual(self.release.rustdoc_status, 0)
        self.assertEqual(self.release.dependencies, [])
        self.assertIsNone(self.release.yanked)
        self.assertFalse(self.release.have_examples)

    def test_unique_together_constraint(self):
        with self.assertRaises(IntegrityError):
            Release.objects.create(crate=self.crate, version='0.3.14')

    def test_multiple_releases_same_crate(self):
        Release.objects.create(crate=self.crate, version='0.3.13')
        self.assertEqual(self.crate.releases.count(), 2)


class RelationModelTests(TestCase):
    """Tests for keyword, author and owner relations"""

    def setUp(self):
        self.crate = Crate.objects.create(name='rand')
        self.release = Release.objects.create(crate=self.crate, version='0.3.14')

    def test_keyword_release_count(self):
        keyword = Keyword.objects.create(name='random', slug='random')
        KeywordRel.objects.create(release=self.release, keyword=keyword)

        self.assertEqual(keyword.release_count(), 1)
        self.assertEqual(list(self.release.keyword_set.all()), [keyword])

    def test_keyword_rel_unique(self):
        keyword = Keyword.objects.create(name='random', slug='random')
        KeywordRel.objects.create(release=self.release, keyword=keyword)

        with self.assertRaises(IntegrityError):
            KeywordRel.objects.create(release=self.release, keyword=keyword)

    def test_author_slug_unique(self):
        Author.objects.create(name='Jane Doe', slug='jane-doe')

        with self.assertRaises(IntegrityError):
            Author.objects.create(name='jane doe', slug='jane-doe')

    def test_author_release_link(self):
        author = Author.objects.create(name='Jane Doe', slug='jane-doe')
        AuthorRel.objects.create(release=self.release, author=author)

        self.assertEqual(list(author.releases.all()), [self.release])
        self.assertEqual(str(author), 'Jane Doe')

    def test_owner_crates(self):
        owner = Owner.objects.create(login='alexcrichton', slug='alexcrichton')
        OwnerRel.objects.create(crate=self.crate, owner=owner)

        self.assertEqual(list(self.crate.owners.all()), [owner])
        self.assertEqual(str(owner), 'alexcrichton')

    def test_deleting_release_removes_relations(self):
        keyword = Keyword.objects.create(name='random', slug='random')
        KeywordRel.objects.create(release=self.release, keyword=keyword)

        self.release.delete()

        self.assertEqual(KeywordRel.objects.count(), 0)
        self.assertEqual(Keyword.objects.count(), 1)

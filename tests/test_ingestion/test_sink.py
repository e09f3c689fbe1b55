# tests/test_ingestion/test_sink.py
import os
import shutil
import tempfile
import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from captionhub.db import base  # noqa: F401
from captionhub.db.session import Base
from captionhub.ingestion.errors import DatasetNotFoundError, PersistenceError, StructuralFormatError
from captionhub.ingestion.sink import SQLAlchemyImageSink
from captionhub.models.dataset import Dataset
from captionhub.models.dataset_image import DatasetImage
from captionhub.models.user import User
from tests.factories import make_record


class SQLAlchemyImageSinkTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="captionhub-sink-")
        self.engine = create_engine(
            f"sqlite:///{os.path.join(self.tmpdir, 'sink.db')}",
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        db = self.Session()
        user = User(email="owner@example.com", name="Owner")
        db.add(user)
        db.flush()
        dataset = Dataset(name="captions", user_id=user.id)
        db.add(dataset)
        db.commit()
        self.dataset_id = dataset.id
        db.close()

        self.sink = SQLAlchemyImageSink(self.Session, batch_size=2)

    def tearDown(self):
        self.engine.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def stored(self):
        db = self.Session()
        try:
            return (
                db.query(DatasetImage)
                .filter(DatasetImage.dataset_id == self.dataset_id)
                .order_by(DatasetImage.row_number)
                .all()
            )
        finally:
            db.close()

    def test_stores_records(self):
        records = [
            make_record(1, external_image_id=42, additional_captions=["b", "c"], license="CC",
                        secondary_url="http://flickr/1.jpg"),
            make_record(2),
            make_record(3),
        ]
        self.assertEqual(self.sink.replace_all_images(self.dataset_id, records), 3)

        images = self.stored()
        self.assertEqual([i.row_number for i in images], [1, 2, 3])
        self.assertEqual([i.img_key for i in images], ["img-1", "img-2", "img-3"])
        first = images[0]
        self.assertEqual(first.url, "http://x/1.jpg")
        self.assertEqual(first.prompt, "caption 1")
        self.assertEqual(first.coco_image_id, 42)
        self.assertEqual(first.additional_captions, ["b", "c"])
        self.assertEqual(first.license, "CC")
        self.assertEqual(first.flickr_url, "http://flickr/1.jpg")
        self.assertIsNone(images[1].additional_captions)

    def test_replaces_previous_images(self):
        self.sink.replace_all_images(self.dataset_id, [make_record(i) for i in range(1, 6)])
        self.sink.replace_all_images(self.dataset_id, [make_record(1, caption="new")])

        images = self.stored()
        self.assertEqual(len(images), 1)
        self.assertEqual(images[0].prompt, "new")

    def test_same_batch_twice_is_idempotent(self):
        records = [make_record(i) for i in range(1, 4)]
        self.sink.replace_all_images(self.dataset_id, records)
        self.sink.replace_all_images(self.dataset_id, records)
        self.assertEqual([i.img_key for i in self.stored()], ["img-1", "img-2", "img-3"])

    def test_constraint_violation_rolls_back(self):
        self.sink.replace_all_images(self.dataset_id, [make_record(1, image_key="old")])

        records = [make_record(1, image_key="dup"), make_record(2), make_record(3, image_key="dup")]
        with self.assertRaises(PersistenceError):
            self.sink.replace_all_images(self.dataset_id, records)

        self.assertEqual([i.img_key for i in self.stored()], ["old"])

    def test_failing_record_source_rolls_back(self):
        self.sink.replace_all_images(self.dataset_id, [make_record(1, image_key="old")])

        def records():
            for i in range(1, 4):
                yield make_record(i)
            raise StructuralFormatError("Error processing CSV file after row 3")

        with self.assertRaises(StructuralFormatError):
            self.sink.replace_all_images(self.dataset_id, records())

        self.assertEqual([i.img_key for i in self.stored()], ["old"])

    def test_missing_dataset(self):
        with self.assertRaises(DatasetNotFoundError):
            self.sink.replace_all_images(self.dataset_id + 100, [make_record(1)])

    def test_other_datasets_are_untouched(self):
        db = self.Session()
        other = Dataset(name="other", user_id=db.query(User).first().id)
        db.add(other)
        db.commit()
        other_id = other.id
        db.close()

        self.sink.replace_all_images(other_id, [make_record(1)])
        self.sink.replace_all_images(self.dataset_id, [make_record(1), make_record(2)])
        self.sink.replace_all_images(self.dataset_id, [make_record(1)])

        db = self.Session()
        try:
            self.assertEqual(db.query(DatasetImage).filter(DatasetImage.dataset_id == other_id).count(), 1)
        finally:
            db.close()

"""Tests for contact-export counting."""

from droidbackup.data.contacts import ContactsCounter


class TestContactsCounter:
    """Test contact file discovery and counting."""

    def test_count_records(self, tmp_path):
        """Only lines starting with the marker count."""
        vcf = tmp_path / "contacts.vcf"
        vcf.write_text(
            "BEGIN:VCARD\r\nFN:One\r\nEND:VCARD\r\n"
            "BEGIN:VCARD\r\nFN:Two\r\nNOTE:BEGIN:VCARD in a note\r\nEND:VCARD\r\n"
            " BEGIN:VCARD\r\n"
            "BEGIN:VCARD\r\nFN:Three\r\nEND:VCARD\r\n"
        )

        assert ContactsCounter().count_records(vcf) == 3

    def test_count_missing_file(self, tmp_path):
        """An unreadable file counts as zero."""
        assert ContactsCounter().count_records(tmp_path / "gone.vcf") == 0

    def test_find_contact_files(self, tmp_path):
        """Matching is on the extension, case-insensitively, in any subfolder."""
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "people.VCF").write_text("BEGIN:VCARD\n")
        (tmp_path / "a" / "notes.txt").write_text("BEGIN:VCARD\n")
        (tmp_path / "folder.vcf").mkdir()

        found = ContactsCounter().find_contact_files(tmp_path)

        assert found == [tmp_path / "a" / "b" / "people.VCF"]

    def test_summarize_none(self, tmp_path):
        """No files gives an empty summary."""
        summary = ContactsCounter().summarize(tmp_path)

        assert summary.record_count == 0
        assert summary.file_path is None
        assert summary.multiple_files is False

    def test_summarize_multiple(self, tmp_path):
        """Several files set the flag and the count matches the first one found."""
        (tmp_path / "x.vcf").write_text("BEGIN:VCARD\n")
        (tmp_path / "y.vcf").write_text("BEGIN:VCARD\nBEGIN:VCARD\n")
        counter = ContactsCounter()

        summary = counter.summarize(tmp_path)

        assert summary.files_found == 2
        assert summary.multiple_files is True
        assert summary.file_path == counter.find_contact_files(tmp_path)[0]
        assert summary.record_count == counter.count_records(summary.file_path)

    def test_custom_extension(self, tmp_path):
        """The extension is configurable."""
        (tmp_path / "book.vcard").write_text("BEGIN:VCARD\nBEGIN:VCARD\n")

        summary = ContactsCounter(".vcard").summarize(tmp_path)

        assert summary.record_count == 2

#!/usr/bin/env python3

import unittest

from uiccsim.filesystem import TransparentFileSystem, SW_OK, SW_FILE_NOT_FOUND, SW_WRONG_LENGTH, SW_WRONG_OFFSET

class TestTransparentFileSystem(unittest.TestCase):
    def setUp(self):
        self.fs = TransparentFileSystem({'6f07': '080910101032547698', '2fe2': '98101430121181157002'})

    def test_read_binary(self):
        self.assertEqual(self.fs.read_binary(0x6f07, 0, 0), (SW_OK, '080910101032547698'))
        self.assertEqual(self.fs.read_binary(0x6f07, 1, 2), (SW_OK, '0910'))
        self.assertEqual(self.fs.read_binary(0x6f07, 8, 2), (SW_WRONG_LENGTH, ''))
        self.assertEqual(self.fs.read_binary(0x6f08, 0, 0), (SW_FILE_NOT_FOUND, ''))

    def test_file_access_read(self):
        self.assertEqual(self.fs.file_access('176,28423,0,0,9'), (True, '144,0,080910101032547698'))
        self.assertEqual(self.fs.file_access('176,12258,0,5,2'), (True, '144,0,1181'))
        self.assertEqual(self.fs.file_access('176,28424,0,0,9'), (True, '106,130'))
        self.assertEqual(self.fs.file_access('176,28423,1,0,1'), (True, '107,0'))

    def test_file_access_update(self):
        self.assertEqual(self.fs.file_access('214,28423,0,1,2,ffff'), (True, '144,0'))
        self.assertEqual(self.fs.file_access('176,28423,0,0,3'), (True, '144,0,08FFFF'))
        self.assertEqual(self.fs.file_access('214,28423,0,8,2,ffff'), (True, '107,0'))
        self.assertEqual(self.fs.file_access('214,28423,0,0,3,ffff'), (True, '103,0'))

    def test_file_access_out_of_range(self):
        self.assertEqual(self.fs.file_access('214,28423,-1,0,2,ffff'), (True, '107,0'))
        self.assertEqual(self.fs.file_access('214,28423,0,256,2,ffff'), (True, '107,0'))
        self.assertEqual(self.fs.file_access('176,28423,0,-2,2'), (True, '107,0'))
        self.assertEqual(self.fs.file_access('176,28423,0,0,-1'), (True, '103,0'))
        self.assertEqual(self.fs.file_access('176,28423,0,0,256'), (True, '103,0'))
        # the EF is left untouched
        self.assertEqual(self.fs.file_access('176,28423,0,0,0'), (True, '144,0,080910101032547698'))

    def test_negative_offset(self):
        self.assertEqual(self.fs.update_binary(0x6f07, -1, b'\x61\x62'), SW_WRONG_OFFSET)
        self.assertEqual(self.fs.read_binary(0x6f07, -1, 1), (SW_WRONG_OFFSET, ''))
        self.assertEqual(self.fs.read_binary(0x6f07, 0, 0), (SW_OK, '080910101032547698'))

    def test_no_files(self):
        fs = TransparentFileSystem()
        self.assertEqual(fs.file_access('176,28423,0,0,0'), (True, '106,130'))

    def test_file_access_unsupported(self):
        self.assertEqual(self.fs.file_access('192,28423,0,0,0'), (True, '109,0'))

    def test_file_access_malformed(self):
        self.assertEqual(self.fs.file_access(''), (False, ''))
        self.assertEqual(self.fs.file_access('176,28423'), (False, ''))
        self.assertEqual(self.fs.file_access('176,6f07,0,0,0'), (False, ''))
        self.assertEqual(self.fs.file_access('214,28423,0,0,1,xx'), (False, ''))

if __name__ == "__main__":
    unittest.main()

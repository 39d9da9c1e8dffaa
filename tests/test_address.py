import unittest

from address import AddressMap

class AddressMapTestCase( unittest.TestCase ):
  def setUp( self ):
    # [ 14:12 flags | 11:4 opcode | 3:0 don't care ]
    self.amap = AddressMap( 15, opcode_shift = 4, opcode_width = 8,
                            flags_shift = 12, flags_width = 3 )

  def test_masks( self ):
    self.assertEqual( self.amap.size, 32768 )
    self.assertEqual( self.amap.opcode_mask, 0x0FF0 )
    self.assertEqual( self.amap.flags_mask, 0x7000 )
    self.assertEqual( self.amap.dont_care_mask, 0x000F )

  def test_slicing( self ):
    self.assertEqual( self.amap.opcode( 0x5A5F ), 0xA5 )
    self.assertEqual( self.amap.flags( 0x5A5F ), 0b101 )
    self.assertEqual( self.amap.address( 0xA5, 0b101, 0xF ), 0x5A5F )

  def test_address_range( self ):
    with self.assertRaises( ValueError ):
      self.amap.address( 0x100 )
    with self.assertRaises( ValueError ):
      self.amap.address( 0, flags = 0b1000 )
    with self.assertRaises( ValueError ):
      self.amap.address( 0, extra = 0x10 )

  def test_addresses( self ):
    addrs = list( self.amap.addresses( 0x42 ) )
    # 3 flag bits and 4 don't-care bits.
    self.assertEqual( len( addrs ), 128 )
    self.assertEqual( len( set( addrs ) ), 128 )
    for addr in addrs:
      self.assertEqual( self.amap.opcode( addr ), 0x42 )

  def test_no_dont_care( self ):
    amap = AddressMap( 15, opcode_shift = 0, opcode_width = 12,
                       flags_shift = 12, flags_width = 3 )
    self.assertEqual( amap.dont_care_mask, 0 )
    self.assertEqual( sorted( amap.addresses( 0x200 ) ),
                      [ ( f << 12 ) | 0x200 for f in range( 8 ) ] )
    self.assertIn( "don't care bits none", amap.describe()[ 3 ] )

  def test_invalid( self ):
    with self.assertRaises( ValueError ):
      AddressMap( 15, opcode_shift = 0, opcode_width = 12,
                  flags_shift = 11, flags_width = 3 )
    with self.assertRaises( ValueError ):
      AddressMap( 15, opcode_shift = 8, opcode_width = 8,
                  flags_shift = 0, flags_width = 3 )

if __name__ == "__main__":
  unittest.main()

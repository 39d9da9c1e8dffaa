import unittest

from amaranth.sim import Simulator

import image
import isa
import isa_v1
import rom

# A spread of interesting locations: every instruction with the
# condition both met and failed, plus a few undefined opcodes.
def sample_addresses():
  addrs = []
  for insn in isa.INSTRUCTIONS:
    addrs.append( isa.ADDRESS_MAP.address( insn.opcode ) )
    addrs.append( isa.ADDRESS_MAP.address( insn.opcode,
                                           isa.FLAG_CONDITION_FAILED ) )
  for opcode in ( 0x002, 0x0FF, 0x300, 0xFFF ):
    addrs.append( isa.ADDRESS_MAP.address( opcode, 0b110 ) )
  return addrs

class ROMTestCase( unittest.TestCase ):
  def test_read( self ):
    dut = rom.ROM( b"\x12\x34\x56\x78" )
    results = []

    async def testbench( ctx ):
      for addr in range( 4 ):
        ctx.set( dut.addr, addr )
        results.append( ctx.get( dut.data ) )

    sim = Simulator( dut )
    sim.add_testbench( testbench )
    sim.run()
    self.assertEqual( results, [ 0x12, 0x34, 0x56, 0x78 ] )

  def test_mismatched_planes( self ):
    with self.assertRaises( ValueError ):
      rom.ControlStore( [ b"\x00\x00", b"\x00" ] )

class VerifyTestCase( unittest.TestCase ):
  def test_final_revision( self ):
    planes = image.byte_planes( image.build_image( isa.MICROCODE ),
                                isa.MICROCODE.width )
    self.assertEqual(
      rom.verify( isa.MICROCODE, planes, sample_addresses() ), [] )

  def test_first_revision( self ):
    planes = image.byte_planes( image.build_image( isa_v1.MICROCODE ),
                                isa_v1.MICROCODE.width )
    self.assertEqual(
      rom.verify( isa_v1.MICROCODE, planes, range( 0, 32768, 97 ) ), [] )

  def test_corrupted_plane( self ):
    planes = image.byte_planes( image.build_image( isa.MICROCODE ),
                                isa.MICROCODE.width )
    jmp = isa.ADDRESS_MAP.address( isa.OP_JMPI[ 0 ] )
    corrupt = bytearray( planes[ 1 ] )
    corrupt[ jmp ] ^= 0x01
    planes[ 1 ] = bytes( corrupt )
    mismatches = rom.verify( isa.MICROCODE, planes, [ 0, jmp ] )
    self.assertEqual( mismatches, [
      ( jmp, isa.MICROCODE( jmp ), isa.MICROCODE( jmp ) ^ 0x100 ),
    ] )

if __name__ == "__main__":
  unittest.main()

import argparse
import logging
import os
import sys

import isa
import isa_v1
import rom

logger = logging.getLogger( __name__ )

# Selectable control ROM revisions. Layouts are not compatible with
# each other; an image is only valid for the revision it was built for.
REVISIONS = {
  "v1": isa_v1.MICROCODE,
  "v5": isa.MICROCODE,
}
DEFAULT_REVISION = "v5"

##########################################
# Image generation: every ROM address -> #
# one control word, sliced into planes.  #
##########################################

def build_image( microcode ):
  return [ microcode( addr ) for addr in range( microcode.size ) ]

# Byte plane 'k' holds byte 'k' (LSB first) of every control word.
def byte_planes( image, width ):
  return [
    bytes( ( word >> ( 8 * k ) ) & 0xFF for word in image )
    for k in range( ( width + 7 ) // 8 )
  ]

# Put a control word back together from its planes.
def assemble( planes, addr ):
  word = 0
  for k, plane in enumerate( planes ):
    word |= plane[ addr ] << ( 8 * k )
  return word

def plane_paths( count, directory = ".", prefix = "ctrl" ):
  return [ os.path.join( directory, "%s%d.bin"%( prefix, k + 1 ) )
           for k in range( count ) ]

# Write one file per ROM chip. Destinations which fail are reported
# and skipped; the remaining planes are still written.
def write_planes( planes, directory = ".", prefix = "ctrl" ):
  written = []
  for plane, path in zip( planes, plane_paths( len( planes ), directory,
                                               prefix ) ):
    try:
      f = open( path, "wb" )
    except OSError as e:
      logger.warning( "unable to open %s: %s", path, e.strerror )
      continue
    try:
      with f:
        f.write( plane )
    except OSError as e:
      logger.warning( "unable to write %s: %s", path, e.strerror )
      # Don't leave a short image behind.
      try:
        os.remove( path )
      except OSError:
        logger.warning( "unable to remove partial image %s", path )
      continue
    logger.info( "wrote %s (%d bytes)", path, len( plane ) )
    written.append( path )
  return written

# Read the images back from disk. Missing or short files are reported
# and come back as None.
def read_planes( count, size, directory = ".", prefix = "ctrl" ):
  planes = []
  for path in plane_paths( count, directory, prefix ):
    try:
      with open( path, "rb" ) as f:
        plane = f.read()
    except OSError as e:
      logger.warning( "unable to read %s: %s", path, e.strerror )
      planes.append( None )
      continue
    if len( plane ) != size:
      logger.warning( "%s is %d bytes, expected %d", path, len( plane ),
                      size )
      planes.append( None )
      continue
    planes.append( plane )
  return planes

# Check the images on disk against the generator through the ROM chip
# model. Returns the number of failures (unreadable files count too).
def verify_images( microcode, directory = ".", prefix = "ctrl" ):
  planes = read_planes( microcode.planes, microcode.size, directory,
                        prefix )
  if None in planes:
    return planes.count( None )
  mismatches = rom.verify( microcode, planes )
  for addr, expected, actual in mismatches[ :8 ]:
    logger.warning( "0x%04X: expected 0x%0*X, found 0x%0*X", addr,
                    microcode.planes * 2, expected,
                    microcode.planes * 2, actual )
  return len( mismatches )

#########################
# Command-line wrapper. #
#########################

def create_argparser():
  parser = argparse.ArgumentParser(
    prog = "ctlrom",
    description = "Generate the control ROM images for the CPU." )
  parser.add_argument(
    "-v", "--verbose", default = 0, action = "count",
    help = "increase logging verbosity" )
  parser.add_argument(
    "-q", "--quiet", default = 0, action = "count",
    help = "decrease logging verbosity" )
  parser.add_argument(
    "-r", "--revision", choices = sorted( REVISIONS ),
    default = DEFAULT_REVISION,
    help = "control ROM revision to build (default: %(default)s)" )
  parser.add_argument(
    "-o", "--output-dir", metavar = "DIR", default = ".",
    help = "write ROM images to DIR (default: current directory)" )
  parser.add_argument(
    "-p", "--prefix", default = "ctrl",
    help = "image file name prefix (default: %(default)s)" )
  parser.add_argument(
    "--describe", default = False, action = "store_true",
    help = "print field layout, address map and instructions, then exit" )
  parser.add_argument(
    "--verify", default = False, action = "store_true",
    help = "check the written images with the ROM chip model" )
  return parser

def configure_logger( args ):
  handler = logging.StreamHandler()
  handler.setFormatter( logging.Formatter(
    style = "{", fmt = "{levelname[0]:s}: {name:s}: {message:s}" ) )
  root_logger = logging.getLogger()
  root_logger.addHandler( handler )
  level = root_logger.level
  root_logger.setLevel( logging.INFO + args.quiet * 10 - args.verbose * 10 )
  return handler, level

def describe( microcode ):
  lines = [ "revision %s"%( microcode.name ) ]
  lines += microcode.layout.describe()
  lines += microcode.address_map.describe()
  lines.append( "%d instructions (C = conditional, I = immediate):"
                %( len( microcode.instructions ) ) )
  lines += microcode.listing()
  return lines

def main( argv = None ):
  args = create_argparser().parse_args( argv )
  handler, level = configure_logger( args )
  try:
    microcode = REVISIONS[ args.revision ]

    if args.describe:
      for line in describe( microcode ):
        print( line )
      return 0

    logger.info( "generating %d x %d-bit control words (revision %s)",
                 microcode.size, microcode.width, microcode.name )
    image = build_image( microcode )
    planes = byte_planes( image, microcode.width )
    written = write_planes( planes, args.output_dir, args.prefix )
    status = 0
    if len( written ) != len( planes ):
      logger.error( "%d of %d ROM images were not written",
                    len( planes ) - len( written ), len( planes ) )
      status = 1

    if args.verify:
      failures = verify_images( microcode, args.output_dir, args.prefix )
      if failures:
        logger.error( "verification failed: %d error(s)", failures )
        status = 1
      else:
        logger.info( "verified %d locations", microcode.size )
    return status
  finally:
    logging.getLogger().removeHandler( handler )
    logging.getLogger().setLevel( level )

if __name__ == "__main__":
  sys.exit( main() )

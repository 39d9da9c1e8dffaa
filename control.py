from fields import ControlWord

#####################################
# Instruction table and control-    #
# word generator: ROM address ->    #
# control word, for one revision.   #
#####################################

class Instruction:
  def __init__( self, opcode, mnemonic, word,
                conditional = False, immediate = False ):
    self.opcode      = opcode
    self.mnemonic    = mnemonic
    self.word        = word
    # Only applied if the condition bit in the address flags is clear.
    self.conditional = conditional
    # The following instruction slot holds an operand, not an opcode.
    self.immediate   = immediate

  def __repr__( self ):
    return "Instruction(0x%03X, %s)"%( self.opcode, self.mnemonic )

class InstructionSet:
  def __init__( self, opcode_width ):
    self.opcode_width = opcode_width
    self.insns = {}

  def add( self, insn ):
    if insn.opcode < 0 or insn.opcode >> self.opcode_width:
      raise ValueError( "%s: opcode 0x%X is wider than %d bits"
                        %( insn.mnemonic, insn.opcode,
                           self.opcode_width ) )
    if insn.opcode in self.insns:
      raise ValueError( "%s: opcode 0x%03X is already assigned to %s"
                        %( insn.mnemonic, insn.opcode,
                           self.insns[ insn.opcode ].mnemonic ) )
    self.insns[ insn.opcode ] = insn
    return insn

  def __getitem__( self, opcode ):
    return self.insns[ opcode ]

  def __contains__( self, opcode ):
    return opcode in self.insns

  def __iter__( self ):
    return iter( self.insns[ op ] for op in sorted( self.insns ) )

  def __len__( self ):
    return len( self.insns )

class Microcode:
  def __init__( self, name, layout, address_map, instructions,
                idle, suppress = None, condition = 0 ):
    self.name         = name
    self.layout       = layout
    self.address_map  = address_map
    self.instructions = instructions
    if suppress is None:
      suppress = ControlWord()
    if condition >> address_map.flags_width:
      raise ValueError( "condition bit 0x%X is not a flag bit"
                        %( condition ) )
    self.condition = condition

    # Canonical idle words: keep the fetch / advance cycle running,
    # optionally without latching the fetched word as an instruction.
    self.idle          = int( layout.check( idle ) )
    self.idle_suppress = int( layout.check( idle | suppress ) )

    # Resolve every rule to a plain integer up front.
    self.rules     = {}
    self.skippable = {}
    for insn in instructions:
      layout.check( insn.word )
      if insn.conditional and not condition:
        raise ValueError( "%s is conditional, but '%s' has no "
                          "condition bit"%( insn.mnemonic, name ) )
      if insn.conditional and insn.immediate and not suppress.mask:
        raise ValueError( "%s takes an immediate, but '%s' has no "
                          "suppress signal"%( insn.mnemonic, name ) )
      self.rules[ insn.opcode ] = int( insn.word )
      if insn.conditional:
        if insn.immediate:
          self.skippable[ insn.opcode ] = self.idle_suppress
        else:
          self.skippable[ insn.opcode ] = self.idle

  @property
  def width( self ):
    return self.layout.width

  @property
  def planes( self ):
    return self.layout.planes

  @property
  def size( self ):
    return self.address_map.size

  # Compute the control word stored at one ROM address.
  def control_word( self, addr ):
    if addr < 0 or addr >= self.size:
      raise ValueError( "address 0x%X is outside of the %d-word ROM"
                        %( addr, self.size ) )
    opcode = self.address_map.opcode( addr )
    flags  = self.address_map.flags( addr )
    # Unassigned opcodes fall back to the idle word.
    if opcode not in self.rules:
      return self.idle
    # Condition failed: skip the instruction (and its operand, if any).
    if ( flags & self.condition ) and ( opcode in self.skippable ):
      return self.skippable[ opcode ]
    return self.rules[ opcode ]

  def __call__( self, addr ):
    return self.control_word( addr )

  # One line per instruction with its decoded field settings.
  def listing( self ):
    lines = []
    for insn in self.instructions:
      attrs = ( ( "C" if insn.conditional else "-" ) +
                ( "I" if insn.immediate else "-" ) )
      settings = self.layout.decode( insn.word )
      fields = " ".join( "%s=%s"%( name, getattr( value, "name", value ) )
                         for name, value in settings.items() )
      lines.append( "  0x%03X %-14s %s  0x%0*X  %s"
                    %( insn.opcode, insn.mnemonic, attrs,
                       self.planes * 2, int( insn.word ), fields ) )
    return lines
